"""
Provider session broker.

- session: ProviderSession, CredentialStore and the process SessionManager
- establisher: CSRF bootstrap + login handshake
- dependencies: FastAPI dependencies resolving the caller's session
"""
