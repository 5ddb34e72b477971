"""Auth domain event names."""

AUTH_USER_REGISTERED = "auth.user.registered"
AUTH_USER_LOGGED_OUT = "auth.user.logged_out"
