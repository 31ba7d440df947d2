from .mcstatus import ServerStatus, StatusAPI, SERVER_INFO_FIELDS

__all__ = ["ServerStatus", "StatusAPI", "SERVER_INFO_FIELDS"]
