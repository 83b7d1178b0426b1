from boxoffice.schemas.common import ErrorResponse, OkResponse
from boxoffice.schemas.room import Room, EngineConfigResponse
from boxoffice.schemas.reservation import (
    Reservation, ReservationCreate, ReservationUpdate, ReservationTransfer,
    ReservationOutcome,
)
from boxoffice.schemas.showing import (
    Showing, ShowingCreate, ShowingUpdate, ShowingListItem, ShowingDetail,
    ShowingCreated,
)
