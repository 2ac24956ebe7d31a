# Supabase Auth
# Identity is owned by Supabase Auth; this backend only verifies bearer tokens.
# Credential, OAuth and phone-OTP flows happen against the identity provider directly.

"""
Supabase Auth provides:
- auth.get_user(jwt) - Resolve a bearer token to the auth.users row

The application profile lives in the public users table (see roles/models.py);
a token whose user has no profile row is treated as unauthenticated.
"""
