"""Studio booking API - services, clients, availability and bookings for a photography studio"""

__version__ = "1.0.0"
