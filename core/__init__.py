"""Core application of the hospital finance backend.

Holds the project/user models, the stored-procedure transaction helper,
the topic publisher and the cash payment endpoints.
"""
