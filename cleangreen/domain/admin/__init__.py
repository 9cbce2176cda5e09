"""Admin domain - bookings, cancellations, reschedule requests, catalog CRUD and analytics"""
