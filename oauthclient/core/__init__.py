"""Core client logic, independent of any CLI or hosting framework.

Module Structure:
    - oauth/            : Identity service client (transport, grant flows,
                          resource calls, user operations)
"""
