from aiogram.fsm.state import State, StatesGroup


class AuthStates(StatesGroup):
    waiting_name = State()


class AddStoreStates(StatesGroup):
    waiting_name = State()
    waiting_description = State()
    waiting_tags = State()
    waiting_location = State()
    waiting_photo = State()


class EditStoreStates(StatesGroup):
    waiting_field = State()
    waiting_value = State()


class ReviewStates(StatesGroup):
    waiting_rating = State()
    waiting_text = State()
