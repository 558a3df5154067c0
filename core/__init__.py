"""Core application for the clinic backend.

Models, serializers, views and route registrations for the clinic API,
plus the store adapter and the real-time event channel.
"""
