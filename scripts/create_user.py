#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from websess.auth.passwords import PasswordHasher
from websess.auth.users import CredentialStore
from websess.config import load_settings
from websess.errors import AuthError
from websess.infra.users_repo import load_users, save_users


def main() -> None:
    settings = load_settings()
    store = CredentialStore(PasswordHasher.from_settings(settings), load_users(settings.users_path).values())

    username = input("Username: ").strip()
    first = input("First name: ").strip()
    last = input("Last name: ").strip()

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        store.create(username, first, last, pw1)
    except AuthError as exc:
        raise SystemExit(exc.message)

    save_users(settings.users_path, store.snapshot())
    print(f"OK -> {settings.users_path}")


if __name__ == "__main__":
    main()
