# Supabase Auth
# This module uses Supabase's built-in authentication system
# Supabase Auth handles:
# - User registration (auth.users table)
# - User login and session management
# - JWT token generation and validation
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users

The display name given at registration is stored in user_metadata and used
as the username of the default profile created on first /auth/me.
New users receive the "general" app_role at the same time (user_roles).
"""
