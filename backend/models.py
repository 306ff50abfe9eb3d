"""
Database models for the fantasy football backend
SQLAlchemy ORM with PostgreSQL
"""

from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    String,
    Float,
    DateTime,
    Boolean,
    Text,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, sessionmaker
from datetime import datetime, timezone
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql://postgres@127.0.0.1:5432/fantasy_liga")

# pool_pre_ping for the long-lived scheduler thread
engine = create_engine(DATABASE_URL, pool_pre_ping=True, echo=False)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class League(Base):
    """A private fantasy league played on one division"""

    __tablename__ = "leagues"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    division = Column(String, nullable=False, default="primera", index=True)  # primera | segunda | premier
    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)


class PlayerMixin:
    """Columns shared by every division's player table"""

    id = Column(Integer, primary_key=True)  # API-Football player id
    name = Column(String, nullable=False)
    position = Column(String)
    team_name = Column(String)
    team_crest = Column(String)
    price = Column(Integer, default=0)

    # Written only by the availability sync; fully overwritten each run
    availability_status = Column(String, nullable=False, default="AVAILABLE", index=True)
    availability_info = Column(String)

    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class PlayerPrimera(PlayerMixin, Base):
    __tablename__ = "players_primera"


class PlayerSegunda(PlayerMixin, Base):
    __tablename__ = "players_segunda"


class PlayerPremier(PlayerMixin, Base):
    __tablename__ = "players_premier"


class PlayerStats(Base):
    """Per-matchday stats; only the card columns are read here"""

    __tablename__ = "player_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, nullable=False, index=True)
    season = Column(Integer, nullable=False)
    jornada = Column(Integer, nullable=False)

    yellow_cards = Column(Integer, default=0)
    red_cards = Column(Integer, default=0)

    __table_args__ = (
        UniqueConstraint("player_id", "season", "jornada", name="_player_season_jornada_uc"),
    )


class BetOption(Base):
    """Generated bet option; the (league_id, jornada) set is replaced as a whole"""

    __tablename__ = "bet_options"

    id = Column(String, primary_key=True)  # fresh uuid per generation run
    league_id = Column(String, nullable=False)
    jornada = Column(Integer, nullable=False)

    match_id = Column(Integer, nullable=False)
    home_team = Column(String, nullable=False)
    away_team = Column(String, nullable=False)
    home_crest = Column(String)
    away_crest = Column(String)

    bet_type = Column(String, nullable=False)
    bet_label = Column(String, nullable=False)
    odd = Column(Float, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (Index("ix_bet_options_league_jornada", "league_id", "jornada"),)


class DataFetch(Base):
    """Track provider fetches for monitoring API-Football health"""

    __tablename__ = "data_fetches"

    id = Column(Integer, primary_key=True, index=True)
    fetch_time = Column(DateTime(timezone=True), default=utcnow, index=True)
    data_source = Column(String, nullable=False, index=True)  # "fixtures", "odds", "players"
    success = Column(Boolean, nullable=False)
    records_fetched = Column(Integer)
    error_message = Column(Text)
    response_time_ms = Column(Integer)

    created_at = Column(DateTime(timezone=True), default=utcnow)


PLAYER_MODELS = {
    "players_primera": PlayerPrimera,
    "players_segunda": PlayerSegunda,
    "players_premier": PlayerPremier,
}


def init_db():
    """Initialize database tables"""
    Base.metadata.create_all(bind=engine)
    print("✅ Database tables created")


if __name__ == "__main__":
    init_db()
