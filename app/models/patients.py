"""Patient document shape as stored in Firestore."""

from datetime import datetime
from typing import NotRequired, TypedDict


class PatientRecord(TypedDict):
    """A document of the patients collection, with its id attached."""

    id: NotRequired[str]
    hn: str
    firstName: str
    lastName: str
    dateOfBirth: NotRequired[str]
    phone: NotRequired[str]
    address: NotRequired[str]
    createdAt: NotRequired[datetime]
    updatedAt: NotRequired[datetime]


# Fields searched by the free-text patient filter, in merge order.
PATIENT_LIST_SEARCH_FIELDS = ("firstName", "lastName", "hn")
PATIENT_SEARCH_FIELDS = ("firstName", "lastName", "hn", "phone")
