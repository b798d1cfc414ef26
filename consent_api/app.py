import logging
from datetime import timedelta
import click
from flask import Flask, jsonify
from flask.cli import with_appcontext
from flask_cors import CORS
from sqlalchemy import delete
from .extensions import db, migrate
from .config import Config
from .auth import build_verifier
from .feed import ReservationFeedClient
from .http import register_error_handlers
from .blueprints.base_mapping import bp as base_mapping_bp
from .blueprints.base_email import bp as base_email_bp
from .blueprints.base_preferences import bp as base_preferences_bp
from .blueprints.consents import bp as consents_bp
from .blueprints.consent_reservations import bp as consent_reservations_bp
from .blueprints.fetch_reservations import bp as fetch_reservations_bp
from .blueprints.consent_pdf import bp as consent_pdf_bp
from .models import BaseMapping, BaseEmailPreference
from .schemas import ReservationIn, ServiceItemIn
from .store import upsert_reservation, replace_services
from .utils.time import utcnow

SAMPLE_BASES = [
    dict(base_id="1001", company_code="SIG", base_number="101", iata="BED", icao="KBED", region="Northeast",
         business_division="FBO", base_description="Bedford", fbo_name="Signature Flight Support BED",
         city="Bedford", state="MA", currency_code="USD", default_units="US", base_country="US",
         base_time_zone="America/New_York"),
    dict(base_id="1002", company_code="SIG", base_number="102", iata="TEB", icao="KTEB", region="Northeast",
         business_division="FBO", base_description="Teterboro", fbo_name="Signature Flight Support TEB",
         city="Teterboro", state="NJ", currency_code="USD", default_units="US", base_country="US",
         base_time_zone="America/New_York"),
    dict(base_id="2001", company_code="SIG", base_number="201", iata="LTN", icao="EGGW", region="Europe",
         business_division="FBO", base_description="London Luton", fbo_name="Signature Flight Support LTN",
         city="Luton", state=None, currency_code="GBP", default_units="Metric", base_country="GB",
         base_time_zone="Europe/London"),
]

def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    CORS(
        app,
        origins=app.config["ALLOW_ORIGIN"],
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "x-client-id", "x-client-secret"],
        expose_headers=["Content-Disposition"],
    )

    db.init_app(app)
    migrate.init_app(app, db)

    app.extensions["claims_verifier"] = build_verifier(app.config)
    app.extensions["reservation_feed"] = ReservationFeedClient(
        app.config["RESERVATION_FEED_URL"],
        app.config["RESERVATION_FEED_API_KEY"],
        timeout=app.config["RESERVATION_FEED_TIMEOUT"],
    )

    register_error_handlers(app)

    app.register_blueprint(base_mapping_bp, url_prefix="/base-mapping")
    app.register_blueprint(base_email_bp, url_prefix="/base-email")
    app.register_blueprint(base_preferences_bp, url_prefix="/base-preferences")
    app.register_blueprint(consents_bp, url_prefix="/consents")
    app.register_blueprint(consent_reservations_bp, url_prefix="/consentReservations")
    app.register_blueprint(fetch_reservations_bp, url_prefix="/fetchReservations")
    app.register_blueprint(consent_pdf_bp, url_prefix="/generate-consent-pdf")

    @app.get("/health")
    def health():
        return jsonify(status="ok")

    @click.command("seed")
    @click.option("--email", default="ops@example.com", help="Notification address to register.")
    @with_appcontext
    def seed_command(email):
        """Loads sample bases, a notification address and a sample reservation."""
        db.session.execute(delete(BaseMapping))
        db.session.add_all([BaseMapping(**b) for b in SAMPLE_BASES])
        if not BaseEmailPreference.query.filter_by(email=email.lower()).one_or_none():
            db.session.add(BaseEmailPreference(email=email.lower(), base_preference="1001"))
        db.session.commit()
        print(f"Created {len(SAMPLE_BASES)} bases.")

        arrival = utcnow() + timedelta(hours=6)
        reservation = ReservationIn.model_validate({
            "reservationId": "R00101",
            "baseId": "1001",
            "companyName": "Sample Aviation LLC",
            "customerAccountNumber": "C-0042",
            "tailNumber": "N123SA",
            "reservationStatus": "Confirmed",
            "fboName": "Signature Flight Support BED",
            "arrivalDetails": {"estimatedArrivalTimeUTC": arrival.isoformat()},
            "departureDetails": {"estimatedDepartureTimeUTC": (arrival + timedelta(days=1)).isoformat()},
        })
        products = [
            ServiceItemIn.model_validate({"productID": "FUEL-JETA", "productName": "Jet-A Fuel", "quantity": 300, "quotedPrice": 1950}),
            ServiceItemIn.model_validate({"productID": "GPU", "productName": "Ground Power Unit", "onArrival": "true"}),
        ]
        reservation_id = upsert_reservation(db.session, reservation)
        replace_services(db.session, reservation_id, products)
        db.session.commit()
        print("Created sample reservation R00101.")
        print("Database seeded!")

    app.cli.add_command(seed_command)

    return app
