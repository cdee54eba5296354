"""auth/ -- Credential issuance for PawPass.

Layer rule: auth/ imports only stdlib + third-party libraries, plus core/
where a module needs configuration types. It does NOT import from api/.
api/ imports from auth/, not the other way around.
"""
