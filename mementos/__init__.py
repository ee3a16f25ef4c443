"""
Mementos
--------

Personal memory management service: uploaded photos and documents linked
to the people, places and events they depict.
"""
__version__ = "0.1.0"
