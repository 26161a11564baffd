# Parking service: in-memory record types

from app.models.parking import Slot, DeviceSnapshot, TransitionEvent, state_label  # noqa
from app.models.user import AdminUser                                             # noqa
