from boxoffice.db.session import Base
from boxoffice.models.room import Room
from boxoffice.models.showing import Showing
from boxoffice.models.reservation import Reservation
