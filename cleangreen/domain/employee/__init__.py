"""Employee portal - permission-gated access to the back-office for staff accounts"""
