import sys

from hotel_reservation.main import main

sys.exit(main())
