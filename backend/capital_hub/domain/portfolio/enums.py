from __future__ import annotations

from enum import Enum


class InvestmentStatus(str, Enum):
    committed = "committed"
    funded = "funded"
    active = "active"
    impaired = "impaired"
    realized = "realized"
    written_off = "written_off"


class Sector(str, Enum):
    infrastructure = "infrastructure"
    healthcare = "healthcare"
    agriculture = "agriculture"
    technology = "technology"
    financial_services = "financial_services"
    manufacturing = "manufacturing"
    real_estate = "real_estate"
    education = "education"
    energy = "energy"
    consumer_goods = "consumer_goods"
    tourism = "tourism"
    logistics = "logistics"


class Geography(str, Enum):
    uganda = "uganda"
    kenya = "kenya"
    tanzania = "tanzania"
    rwanda = "rwanda"
    ethiopia = "ethiopia"
    drc = "drc"
    south_sudan = "south_sudan"
    east_africa_other = "east_africa_other"
    pan_africa = "pan_africa"


class ValuationMethod(str, Enum):
    cost = "cost"
    market = "market"
    revenue_multiple = "revenue_multiple"
    ebitda_multiple = "ebitda_multiple"
    dcf = "dcf"
    comparable = "comparable"
    third_party = "third_party"


class ExitType(str, Enum):
    ipo = "ipo"
    acquisition = "acquisition"
    secondary = "secondary"
    buyback = "buyback"
    write_off = "write_off"
