"""
The CONTROLLER layer schedules work on the Qt event loop and connects the
model to the views.
"""
