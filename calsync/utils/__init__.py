"""
utils package: environment access, logging setup and error handling
shared by the rest of calsync.
"""
