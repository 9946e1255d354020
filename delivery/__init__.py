from delivery.handlers import ArchiveHandler, DirectoryHandler, LogHandler, PasteHandler

__all__ = ["ArchiveHandler", "DirectoryHandler", "LogHandler", "PasteHandler"]
