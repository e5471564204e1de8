"""Bookings domain - submission, status transitions and reminders"""
