"""To-dogether client core.

Session token lifecycle, startup auth guard and a retrying request gateway
for the To-dogether shared todo list backend.
"""

__version__ = "1.0.0"
