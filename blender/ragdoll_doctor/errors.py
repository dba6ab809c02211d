"""Error taxonomy for Ragdoll Doctor.

None of these abort the host: the session turns them into status text.
"""


class RagdollDoctorError(Exception):
    """Base class for problems reported to the user as status text."""


class NoHierarchyFound(RagdollDoctorError):
    """No rigid-body hierarchy exists in the given scene or selection."""


class EmptySelection(RagdollDoctorError):
    """The user has nothing selected."""


class NoIssuesToResolve(RagdollDoctorError):
    """A bulk fix was requested but the last scan found nothing to fix."""
