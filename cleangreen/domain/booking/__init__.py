"""Booking domain - customer booking wizard, slot availability, discounts and cancellation policy"""
