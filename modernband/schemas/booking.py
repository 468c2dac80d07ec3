import datetime as dt
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PackageType(str, Enum):
    BARAAT = "Baraat Band Package"
    DJ = "DJ Band Package"
    DHOL = "Dhol Only Package"
    RECEPTION = "Reception Package"
    FULL_WEDDING = "Full Wedding Package"


class TimeSlot(str, Enum):
    EARLY = "7PM to 9PM"
    LATE = "10PM to 12PM"
    MIDNIGHT = "12PM to 2PM"
    FULL_TIME = "Full Time"
    CUSTOM = "Custom"


class BookingDraft(BaseModel):
    """In-progress booking. Field names are the backend's wire keys."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True, use_enum_values=True)

    # Personal info
    name: str = ""
    email: str = ""
    phone: str = ""
    additionalPhone: str = ""

    # Event details
    packageType: Optional[PackageType] = None
    date: Optional[dt.date] = None
    venue: str = ""
    city: str = ""

    # Package options
    bandTime: Optional[TimeSlot] = None
    customTimeSlot: str = ""
    numberOfPeople: Optional[int] = None
    numberOfLights: Optional[int] = None
    numberOfDhols: Optional[int] = None
    ghodiForBaraat: bool = False
    ghodaBaggi: Optional[int] = None

    # Add-ons
    fireworks: bool = False
    fireworksAmount: Optional[int] = None
    flowerCanon: bool = False
    doliForVidai: bool = Field(default=False, alias="DoliForVidai")
    customization: str = ""

    # Payment
    amount: int = 0
    advancePayment: int = 0


class DraftPatch(BaseModel):
    """Partial update sent by the page as the user fills fields. Unset keys are left alone."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    additionalPhone: Optional[str] = None
    packageType: Optional[PackageType] = None
    date: Optional[dt.date] = None
    venue: Optional[str] = None
    city: Optional[str] = None
    bandTime: Optional[TimeSlot] = None
    customTimeSlot: Optional[str] = None
    numberOfPeople: Optional[int] = None
    numberOfLights: Optional[int] = None
    numberOfDhols: Optional[int] = None
    ghodiForBaraat: Optional[bool] = None
    ghodaBaggi: Optional[int] = None
    fireworks: Optional[bool] = None
    fireworksAmount: Optional[int] = None
    flowerCanon: Optional[bool] = None
    doliForVidai: Optional[bool] = Field(default=None, alias="DoliForVidai")
    customization: Optional[str] = None
    amount: Optional[int] = None
    advancePayment: Optional[int] = None


class BookingRecord(BookingDraft):
    """Booking as persisted by the backend. Extra backend keys are kept."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True, use_enum_values=True, extra="allow")

    id: str
    createdAt: Optional[str] = None
    # Stored bookings may carry package names or dates the wizard no longer offers.
    packageType: Optional[str] = None
    date: Optional[str] = None
    bandTime: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data):
        """Backend sends null for unset fields; fall back to the draft defaults."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class PriceSummaryOut(BaseModel):
    baseAmount: Union[int, float]
    fireworksAmount: Union[int, float]
    totalAmount: Union[int, float]
    advancePayment: Union[int, float]
    remainingAmount: Union[int, float]


class WizardOut(BaseModel):
    id: str
    step: int
    stepName: str
    status: str  # "active" | "submitted"
    stepValid: Dict[int, bool]
    errors: Dict[str, str]
    showConfirmation: bool
    submitting: bool
    submitError: Optional[str] = None
    relevantFields: List[str]
    draft: dict
    summary: PriceSummaryOut
    booking: Optional[dict] = None


class BookingLookupOut(BaseModel):
    booking: dict
    summary: PriceSummaryOut
