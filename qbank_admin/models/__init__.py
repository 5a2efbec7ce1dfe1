from qbank_admin.models.orm import Answer, Base, Module, Question, Subject, SubModule

__all__ = ["Answer", "Base", "Module", "Question", "Subject", "SubModule"]
