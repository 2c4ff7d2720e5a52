"""
SQLAlchemy database models for the advisory API.

This module defines the tables for clients, their simulations (financial plans)
and everything attached to a simulation: allocations with their valuation
records, cash movements and insurance policies.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, Float, ForeignKey, Index,
    Integer, Numeric, String, Text
)
from sqlalchemy.orm import relationship

from .base import Base


def _money(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _iso(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None


class Client(Base):
    """Client of the advisory firm."""

    __tablename__ = 'clients'

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(50))
    address = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    simulations = relationship("Simulation", back_populates="client", cascade="all, delete-orphan")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "is_active": self.is_active,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Client(id={self.id}, email='{self.email}', name='{self.name}')>"


class Simulation(Base):
    """A client's financial plan, versioned through base_id."""

    __tablename__ = 'simulations'

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey('clients.id', ondelete='CASCADE'), nullable=False, index=True)
    base_id = Column(Integer, ForeignKey('simulations.id', ondelete='SET NULL'), index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    status = Column(String(20), nullable=False, default='ATIVO')
    start_date = Column(Date, nullable=False)
    real_rate = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    client = relationship("Client", back_populates="simulations")
    base = relationship("Simulation", remote_side=[id], back_populates="versions")
    versions = relationship("Simulation", back_populates="base")
    allocations = relationship("Allocation", back_populates="simulation", cascade="all, delete-orphan")
    movements = relationship("Movement", back_populates="simulation", cascade="all, delete-orphan")
    insurances = relationship("Insurance", back_populates="simulation", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("status IN ('ATIVO', 'INATIVO', 'SITUACAO_ATUAL')", name='ck_simulation_status'),
        Index('idx_simulations_client_created', 'client_id', 'created_at'),
        Index('idx_simulations_name', 'name'),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "base_id": self.base_id,
            "name": self.name,
            "description": self.description,
            "status": self.status,
            "start_date": _iso(self.start_date),
            "real_rate": self.real_rate,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Simulation(id={self.id}, client_id={self.client_id}, name='{self.name}')>"


class Allocation(Base):
    """An asset held within a simulation."""

    __tablename__ = 'allocations'

    id = Column(Integer, primary_key=True, index=True)
    simulation_id = Column(Integer, ForeignKey('simulations.id', ondelete='CASCADE'), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    name = Column(String(255), nullable=False)
    value = Column(Numeric(15, 2), nullable=False)
    start_date = Column(Date)
    installments = Column(Integer)
    interest_rate = Column(Float)

    # Relationships
    simulation = relationship("Simulation", back_populates="allocations")
    records = relationship(
        "AssetRecord",
        back_populates="allocation",
        cascade="all, delete-orphan",
        order_by="AssetRecord.id",
    )

    __table_args__ = (
        CheckConstraint("type IN ('FINANCEIRA', 'IMOBILIZADA')", name='ck_allocation_type'),
        CheckConstraint("value >= 0", name='ck_allocation_value_non_negative'),
    )

    def to_dict(self, include_records: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "simulation_id": self.simulation_id,
            "type": self.type,
            "name": self.name,
            "value": _money(self.value),
            "start_date": _iso(self.start_date),
            "installments": self.installments,
            "interest_rate": self.interest_rate,
        }
        if include_records:
            data["records"] = [record.to_dict() for record in self.records]
        return data

    def __repr__(self):
        return f"<Allocation(id={self.id}, simulation_id={self.simulation_id}, type='{self.type}', value={self.value})>"


class AssetRecord(Base):
    """Dated valuation of an allocation."""

    __tablename__ = 'asset_records'

    id = Column(Integer, primary_key=True, index=True)
    allocation_id = Column(Integer, ForeignKey('allocations.id', ondelete='CASCADE'), nullable=False, index=True)
    date = Column(Date, nullable=False)
    value = Column(Numeric(15, 2), nullable=False)
    notes = Column(Text)

    # Relationships
    allocation = relationship("Allocation", back_populates="records")

    __table_args__ = (
        Index('idx_asset_records_allocation_date', 'allocation_id', 'date'),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "allocation_id": self.allocation_id,
            "date": _iso(self.date),
            "value": _money(self.value),
            "notes": self.notes,
        }

    def __repr__(self):
        return f"<AssetRecord(id={self.id}, allocation_id={self.allocation_id}, date={self.date}, value={self.value})>"


class Movement(Base):
    """One-off or recurring cash inflow/outflow of a simulation."""

    __tablename__ = 'movements'

    id = Column(Integer, primary_key=True, index=True)
    simulation_id = Column(Integer, ForeignKey('simulations.id', ondelete='CASCADE'), nullable=False, index=True)
    type = Column(String(10), nullable=False, index=True)
    value = Column(Numeric(15, 2), nullable=False)
    description = Column(Text, nullable=False, default='')
    frequency = Column(String(10), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    category = Column(String(100))

    # Relationships
    simulation = relationship("Simulation", back_populates="movements")

    __table_args__ = (
        CheckConstraint("type IN ('ENTRADA', 'SAIDA')", name='ck_movement_type'),
        CheckConstraint("frequency IN ('UNICA', 'MENSAL', 'ANUAL')", name='ck_movement_frequency'),
        CheckConstraint("value > 0", name='ck_movement_value_positive'),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "simulation_id": self.simulation_id,
            "type": self.type,
            "value": _money(self.value),
            "description": self.description,
            "frequency": self.frequency,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "category": self.category,
        }

    def __repr__(self):
        return f"<Movement(id={self.id}, simulation_id={self.simulation_id}, type='{self.type}', frequency='{self.frequency}', value={self.value})>"


class Insurance(Base):
    """Insurance policy attached to a simulation."""

    __tablename__ = 'insurances'

    id = Column(Integer, primary_key=True, index=True)
    simulation_id = Column(Integer, ForeignKey('simulations.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False, default='VIDA')
    start_date = Column(Date, nullable=False)
    duration_months = Column(Integer, nullable=False)
    premium = Column(Numeric(15, 2), nullable=False, default=0)
    insured_value = Column(Numeric(15, 2), nullable=False)

    # Relationships
    simulation = relationship("Simulation", back_populates="insurances")

    __table_args__ = (
        CheckConstraint("type IN ('VIDA', 'INVALIDEZ', 'OUTRO')", name='ck_insurance_type'),
        CheckConstraint("duration_months >= 0", name='ck_insurance_duration_non_negative'),
        CheckConstraint("insured_value >= 0", name='ck_insurance_value_non_negative'),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "simulation_id": self.simulation_id,
            "name": self.name,
            "type": self.type,
            "start_date": _iso(self.start_date),
            "duration_months": self.duration_months,
            "premium": _money(self.premium),
            "insured_value": _money(self.insured_value),
        }

    def __repr__(self):
        return f"<Insurance(id={self.id}, simulation_id={self.simulation_id}, insured_value={self.insured_value})>"
