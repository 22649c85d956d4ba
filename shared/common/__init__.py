# Shared Common Library for the Venue Booking platform
# Authentication, exception handling, middleware, model mixins and
# pagination used by the booking services.

__version__ = "1.0.0"
