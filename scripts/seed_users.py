import argparse
import os

from dotenv import load_dotenv

from roomhub.core.app_factory import build_container
from roomhub.core.config import Settings
from roomhub.core.logging import configure_logging
from roomhub.domain.errors import AccountError
from roomhub.domain.models import Role

DEMO_ACCOUNTS = [
    {
        "name": "Camila",
        "last_name": "Rojas",
        "email": "camila.seeker@roomhub.cl",
        "region": "Metropolitana",
        "city": "Santiago",
        "phone": "987654321",
        "role": Role.SEEKER,
        "bio": "Estudiante de ingenieria buscando pieza cerca del metro.",
        "habits": "No fumo, ordenada, me acuesto temprano.",
    },
    {
        "name": "Matias",
        "last_name": "Fuentes",
        "email": "matias.host@roomhub.cl",
        "region": "Valparaiso",
        "city": "Vina del Mar",
        "phone": "912345678",
        "role": Role.HOST,
        "bio": "Arriendo una pieza amoblada en departamento compartido.",
        "habits": "Trabajo desde casa, acepto mascotas pequenas.",
    },
]


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Create the administrator and optional demo accounts.")
    parser.add_argument("--demo", action="store_true", help="also create demo seeker and host accounts")
    args = parser.parse_args()

    configure_logging()
    settings = Settings()
    if not settings.admin_default_email or not settings.admin_default_password:
        raise RuntimeError("Set ADMIN_EMAIL and ADMIN_PASSWORD in the environment or in a .env file.")

    container = build_container(settings)
    try:
        admin = container.admin_service.ensure_default_admin(
            settings.admin_default_email,
            settings.admin_default_password,
            settings.admin_default_phone,
        )
        print("Administrator ready:", admin.email)

        if not args.demo:
            return

        demo_password = os.getenv("DEMO_PASSWORD", "RoomHub2024")
        for data in DEMO_ACCOUNTS:
            try:
                account = container.admin_service.create_account(password=demo_password, **data)
            except AccountError as exc:
                print(f"Skipped {data['email']}: {exc.message}")
                continue
            print(f"Created {account.role.value} account {account.email}")
    finally:
        container.repository.close()


if __name__ == "__main__":
    main()
