from .availability import (
    AvailableSlotsResponse,
    WindowSpan,
    WindowCreate,
    WindowUpdate,
    DayWindowsReplace,
    BlockedDateCreate
)

from .appointment import (
    AppointmentCreate,
    PublicBookingRequest,
    AppointmentUpdate,
    AppointmentReschedule,
    AppointmentCancel,
    PublicCancelRequest,
    PublicRescheduleRequest
)

from .catalog import (
    ServiceCreate,
    ServiceUpdate,
    StaffAssignment,
    StaffCreate,
    StaffUpdate
)

from .business import (
    BusinessUpdate,
    BusinessSettingsUpdate,
    LinkSlugRequest
)

from .whatsapp import (
    TemplateUpsert,
    SendMessageRequest
)

from .team import (
    RoleCreate,
    MemberUpdate,
    InvitationCreate
)
