from typing import NewType

ParcelNumber = NewType("ParcelNumber", int)
ClientId = NewType("ClientId", int)
