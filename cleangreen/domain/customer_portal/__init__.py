"""Customer portal - a customer's bookings, referrals, recurring plans and invoices looked up by email"""
