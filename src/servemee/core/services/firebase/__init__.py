from .identity_client import FirebaseIdentityClient, SignInResult

__all__ = ["FirebaseIdentityClient", "SignInResult"]
