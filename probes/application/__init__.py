"""
Application module - Probe handles and probe-set configuration.
"""
