"""Application services: token verification, authorization, sessions, reactions."""
