"""
Company wizard: form state, derived ratios, entry editing, drafts and the
seven-step state machine.
"""

from app.services.wizard.form_state import SECTIONS, FormState, UploadedFile

__all__ = [
    "FormState",
    "SECTIONS",
    "UploadedFile",
]
