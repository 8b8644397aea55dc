"""servemee backend.

Authentication and user-profile API backed by Firebase Authentication, with a
SQL schema evolved through ordered, reversible migrations and the client-side
route guard logic used by the web frontend.
"""

__version__ = "0.1.0"
