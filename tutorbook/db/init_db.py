# tutorbook/db/init_db.py
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from tutorbook import models  # noqa
from tutorbook.core.config import settings
from tutorbook.core.enums import Role
from tutorbook.core.security import get_password_hash
from tutorbook.db.base import Base
from tutorbook.db.session import SessionLocal, atomic, engine

logger = logging.getLogger(__name__)

PRIMARY = "Grade 1-5 (Primary)"
MIDDLE = "Grade 6-8 (Middle)"
SECONDARY = "Grade 9-10 (Secondary)"
O_LEVEL = "O-Level"
A_LEVEL = "A-Level"
UNIVERSITY = "University/College"
ADULT = "Adult Learning"

# name, description, image, {grade_level: price_per_hour}
DEFAULT_CATALOG = [
    (
        "Math",
        "From basic arithmetic to advanced calculus, our math tutors make numbers make sense.",
        "/subject-math.jpg",
        {PRIMARY: 15, MIDDLE: 18, SECONDARY: 22, O_LEVEL: 28, A_LEVEL: 35, UNIVERSITY: 40},
    ),
    (
        "Physics",
        "Understand the laws of the universe with our expert Physics tutors.",
        "/subject-physics.jpg",
        {MIDDLE: 18, SECONDARY: 22, O_LEVEL: 28, A_LEVEL: 35, UNIVERSITY: 42},
    ),
    (
        "Chemistry",
        "Learn Chemistry from qualified professionals. Organic, inorganic, and physical chemistry.",
        "/subject-chemistry.jpg",
        {MIDDLE: 18, SECONDARY: 22, O_LEVEL: 28, A_LEVEL: 35, UNIVERSITY: 42},
    ),
    (
        "English",
        "Master English language skills with expert tutors. Grammar, literature, and communication.",
        "/subject-english.jpg",
        {
            PRIMARY: 14,
            MIDDLE: 17,
            SECONDARY: 20,
            O_LEVEL: 25,
            A_LEVEL: 30,
            UNIVERSITY: 35,
            ADULT: 28,
        },
    ),
    (
        "Science",
        "Comprehensive science tutoring covering biology, earth science, and general science.",
        "/subject-science.jpg",
        {PRIMARY: 14, MIDDLE: 17, SECONDARY: 20},
    ),
    (
        "IELTS",
        "Prepare for your IELTS exam with certified trainers. Achieve your target band score.",
        "/subject-ielts.jpg",
        {ADULT: 35},
    ),
    (
        "SAT",
        "Comprehensive SAT preparation to help you get into your dream university.",
        "/subject-sat.jpg",
        {SECONDARY: 38, A_LEVEL: 42},
    ),
    (
        "Biology",
        "Learn about living organisms, from cells to ecosystems.",
        "/subject-science.jpg",
        {MIDDLE: 17, SECONDARY: 21, O_LEVEL: 27, A_LEVEL: 34},
    ),
    (
        "Computer Science",
        "Programming, algorithms, and computer fundamentals.",
        "/subject-physics.jpg",
        {MIDDLE: 20, SECONDARY: 25, O_LEVEL: 30, A_LEVEL: 38, UNIVERSITY: 45},
    ),
]


def seed_catalog(db: Session) -> int:
    """Insert the default subjects and pricing tiers if the catalog is empty."""
    if db.query(models.Subject).first() is not None:
        return 0

    with atomic(db):
        for name, description, image, tiers in DEFAULT_CATALOG:
            subject = models.Subject(name=name, description=description, image=image)
            subject.pricing_tiers = [
                models.PricingTier(grade_level=grade, price_per_hour=Decimal(price))
                for grade, price in tiers.items()
            ]
            db.add(subject)

    logger.info(f"Seeded {len(DEFAULT_CATALOG)} default subjects")
    return len(DEFAULT_CATALOG)


def seed_admin(db: Session) -> None:
    if not settings.FIRST_ADMIN_PASSWORD:
        return
    existing = (
        db.query(models.User)
        .filter(models.User.email == settings.FIRST_ADMIN_EMAIL)
        .first()
    )
    if existing:
        return

    with atomic(db):
        db.add(
            models.User(
                email=settings.FIRST_ADMIN_EMAIL,
                password_hash=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
                name="Admin User",
                role=Role.admin,
            )
        )
    logger.info(f"Created admin user {settings.FIRST_ADMIN_EMAIL}")


def init_db(db: Session | None = None, *, seed: bool = False) -> None:
    bind = db.get_bind() if db is not None else engine
    Base.metadata.create_all(bind=bind)

    if not seed:
        return

    session = db or SessionLocal()
    try:
        seed_catalog(session)
        seed_admin(session)
    finally:
        if db is None:
            session.close()
