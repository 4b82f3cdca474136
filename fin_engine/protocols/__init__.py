"""
FIN Engine - Protocols

Message codecs and their validators.
"""
