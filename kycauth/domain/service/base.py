"""Base service class for domain services."""


class Service:
    """Base class for domain services.

    Domain services hold logic that spans the User aggregate and its
    collaborators (token signing, the attempt store, OAuth clients).
    """

    pass
