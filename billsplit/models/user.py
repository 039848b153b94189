from billsplit.models.base import MongoModel


class User(MongoModel):
    """
    A person who can pay for bills or be assigned bill items.

    Deleting a user only flips is_deleted so bills that reference the user
    keep resolving it.
    """
    name: str
    phone: str
    is_deleted: bool = False
