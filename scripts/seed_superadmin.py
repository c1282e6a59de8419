import getpass
import os

from dotenv import load_dotenv

from app.application.services.access_service import AccessService
from app.core.config import Settings
from app.infrastructure.persistence.sqlite import SQLitePersistence
from app.services.password_hasher import BcryptPasswordHasher
from app.services.token_service import JwtTokenIssuer


def main() -> None:
    load_dotenv()

    email = os.getenv("SUPERADMIN_EMAIL") or input("Email del superadmin: ").strip()
    password = os.getenv("SUPERADMIN_PASSWORD") or getpass.getpass("Password: ")
    if not email or not password:
        raise RuntimeError("Defina SUPERADMIN_EMAIL y SUPERADMIN_PASSWORD en el entorno o en un archivo .env.")

    settings = Settings()
    persistence = SQLitePersistence(settings.database_path)
    try:
        hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
        access = AccessService(persistence, JwtTokenIssuer(settings.jwt_secret, settings.jwt_algorithm), hasher)
        user = access.ensure_default_superadmin(email, password)
        if user is None or not user.is_superadmin:
            print(f"La cuenta {email} ya existe sin el rol SUPERADMIN.")
            return
        print(f"Superadmin {user.email} listo (id={user.id}).")
    finally:
        persistence.close()


if __name__ == "__main__":
    main()
