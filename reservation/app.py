# module reservation.app
from reservation.app_setup.factory import create_app

app = create_app()
