"""Work metadata sources."""

from rjsync.metadata.hvdb import HvdbClient, name_to_id, parse_work_details

__all__ = ["HvdbClient", "name_to_id", "parse_work_details"]
