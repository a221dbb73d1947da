"""
Command line interface.

Usage:
    poiquery init-db [--drop] [--admin-email EMAIL --admin-password PASSWORD]
    poiquery encrypt LAT LNG [--radius METERS]
    poiquery decrypt CT_LAT CT_LNG
    poiquery import-csv FILE --base-url URL --email EMAIL --password PASSWORD
    poiquery serve [--host HOST] [--port PORT] [--reload]
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from poiquery.client import APIError, POIQueryClient
from poiquery.core.config import settings
from poiquery.core.exceptions import AppException
from poiquery.core.logging import setup_logging
from poiquery.csv_import import load_poi_csv
from poiquery.services.cipher import CoordinateCipher

logger = logging.getLogger(__name__)


def _cipher(args: argparse.Namespace) -> CoordinateCipher:
    return CoordinateCipher(args.passphrase or settings.ENCRYPTION_PASSPHRASE)


def cmd_init_db(args: argparse.Namespace) -> int:
    from poiquery.init_db import init_database

    if bool(args.admin_email) != bool(args.admin_password):
        logger.error("--admin-email and --admin-password must be given together")
        return 2

    asyncio.run(init_database(
        drop_existing=args.drop,
        admin_email=args.admin_email,
        admin_password=args.admin_password,
    ))
    return 0


def cmd_encrypt(args: argparse.Namespace) -> int:
    cipher = _cipher(args)
    encrypted_lat, encrypted_lng = cipher.encrypt(args.lat, args.lng)
    print(f"encryptedLat: {encrypted_lat}")
    print(f"encryptedLng: {encrypted_lng}")
    if args.radius is not None:
        print(f"encryptedRadius: {cipher.encrypt_scalar(args.radius)}")
    return 0


def cmd_decrypt(args: argparse.Namespace) -> int:
    lat, lng = _cipher(args).decrypt(args.encrypted_lat, args.encrypted_lng)
    print(f"lat: {lat}")
    print(f"lng: {lng}")
    return 0


def cmd_import_csv(args: argparse.Namespace) -> int:
    client = POIQueryClient(args.base_url, passphrase=args.passphrase)
    parsed = load_poi_csv(args.file, client.cipher)
    for error in parsed.errors:
        logger.warning(f"Skipped {error}")

    client.login(args.email, args.password)
    created = client.bulk_add_pois(parsed.pois)
    print(f"Imported {len(created)} POIs ({parsed.skipped} rows skipped)")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("poiquery.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poiquery",
        description="POI Query service and client tools",
    )
    parser.add_argument(
        "--passphrase",
        default=None,
        help="Coordinate passphrase (default: ENCRYPTION_PASSPHRASE)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_db = subparsers.add_parser("init-db", help="Create database tables")
    init_db.add_argument(
        "--drop",
        action="store_true",
        help="Drop existing tables before creating (DANGER: deletes data!)",
    )
    init_db.add_argument("--admin-email", help="Seed an admin account with this email")
    init_db.add_argument("--admin-password", help="Password for the seeded admin")
    init_db.set_defaults(func=cmd_init_db)

    encrypt = subparsers.add_parser("encrypt", help="Encrypt a coordinate pair")
    encrypt.add_argument("lat", type=float)
    encrypt.add_argument("lng", type=float)
    encrypt.add_argument("--radius", type=float, help="Also encrypt a radius in meters")
    encrypt.set_defaults(func=cmd_encrypt)

    decrypt = subparsers.add_parser("decrypt", help="Decrypt a coordinate pair")
    decrypt.add_argument("encrypted_lat")
    decrypt.add_argument("encrypted_lng")
    decrypt.set_defaults(func=cmd_decrypt)

    import_csv = subparsers.add_parser("import-csv", help="Bulk add POIs from a CSV file")
    import_csv.add_argument("file")
    import_csv.add_argument("--base-url", default="http://localhost:8000")
    import_csv.add_argument("--email", required=True)
    import_csv.add_argument("--password", required=True)
    import_csv.set_defaults(func=cmd_import_csv)

    serve = subparsers.add_parser("serve", help="Run the API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    try:
        return args.func(args)
    except (AppException, APIError) as e:
        logger.error(e.message)
        return 1
    except OSError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
