from notebookhub.models.document import NoteDocument

__all__ = ["NoteDocument"]
