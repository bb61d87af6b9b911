"""Pregnancy, update and milestone enums."""

from enum import Enum


class UpdateType(str, Enum):
    """Kinds of user-authored updates."""

    GENERAL = "general"
    APPOINTMENT = "appointment"
    MILESTONE = "milestone"
    PHOTO = "photo"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class AppointmentType(str, Enum):
    FIRST_APPOINTMENT = "first_appointment"
    WEEK_12_SCAN = "12_week_scan"
    WEEK_20_SCAN = "20_week_scan"
    WEEK_28_CHECKUP = "28_week_checkup"
    WEEK_32_CHECKUP = "32_week_checkup"
    WEEK_36_CHECKUP = "36_week_checkup"
    WEEK_38_CHECKUP = "38_week_checkup"
    WEEK_40_CHECKUP = "40_week_checkup"
    ULTRASOUND = "ultrasound"
    BLOODWORK = "bloodwork"
    OTHER = "other"


class MilestoneType(str, Enum):
    """Persisted milestone kinds (defaults plus user-scheduled ones)."""

    FIRST_APPOINTMENT = "first_appointment"
    WEEK_12_SCAN = "12_week_scan"
    WEEK_20_SCAN = "20_week_scan"
    WEEK_36_APPOINTMENT = "36_week_appointment"
    DUE_DATE = "due_date"
    INDUCTION_SCHEDULED = "induction_scheduled"
    ANNOUNCEMENT_MADE = "announcement_made"
    GENDER_REVEALED = "gender_revealed"
    NURSERY_COMPLETE = "nursery_complete"
    HOSPITAL_BAG_PACKED = "hospital_bag_packed"
    MATERNITY_LEAVE = "maternity_leave"
    PATERNITY_LEAVE = "paternity_leave"
    BABY_SHOWER = "baby_shower"


class MilestoneCategory(str, Enum):
    """Category of a catalog milestone."""

    APPOINTMENT = "appointment"
    DEVELOPMENT = "development"
    MILESTONE = "milestone"


UPDATE_TYPE_LABELS = {
    UpdateType.GENERAL.value: "General Update",
    UpdateType.APPOINTMENT.value: "Doctor Appointment",
    UpdateType.MILESTONE.value: "Milestone",
    UpdateType.PHOTO.value: "Photo Update",
}

APPOINTMENT_TYPE_LABELS = {
    AppointmentType.FIRST_APPOINTMENT.value: "First Appointment",
    AppointmentType.WEEK_12_SCAN.value: "12 Week Scan",
    AppointmentType.WEEK_20_SCAN.value: "20 Week Anatomy Scan",
    AppointmentType.WEEK_28_CHECKUP.value: "28 Week Checkup",
    AppointmentType.WEEK_32_CHECKUP.value: "32 Week Checkup",
    AppointmentType.WEEK_36_CHECKUP.value: "36 Week Checkup",
    AppointmentType.WEEK_38_CHECKUP.value: "38 Week Checkup",
    AppointmentType.WEEK_40_CHECKUP.value: "40 Week Checkup",
    AppointmentType.ULTRASOUND.value: "Ultrasound",
    AppointmentType.BLOODWORK.value: "Bloodwork",
}

MILESTONE_TYPE_LABELS = {
    MilestoneType.FIRST_APPOINTMENT.value: "First Doctor Appointment",
    MilestoneType.WEEK_12_SCAN.value: "12 Week Scan",
    MilestoneType.WEEK_20_SCAN.value: "20 Week Anatomy Scan",
    MilestoneType.WEEK_36_APPOINTMENT.value: "36 Week Appointment",
    MilestoneType.DUE_DATE.value: "Due Date",
    MilestoneType.INDUCTION_SCHEDULED.value: "Induction Scheduled",
    MilestoneType.ANNOUNCEMENT_MADE.value: "Pregnancy Announcement",
    MilestoneType.GENDER_REVEALED.value: "Gender Reveal",
    MilestoneType.NURSERY_COMPLETE.value: "Nursery Complete",
    MilestoneType.HOSPITAL_BAG_PACKED.value: "Hospital Bag Packed",
    MilestoneType.MATERNITY_LEAVE.value: "Maternity Leave Starts",
    MilestoneType.PATERNITY_LEAVE.value: "Paternity Leave Starts",
    MilestoneType.BABY_SHOWER.value: "Baby Shower",
}
