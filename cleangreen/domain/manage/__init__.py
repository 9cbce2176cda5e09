"""Manage-booking domain - management-token view, cancellation and reschedule requests"""
