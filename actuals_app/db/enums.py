# actuals_app/db/enums.py
import enum


# Trade / category related enums
class TradeCategory(enum.Enum):
    planning = "planning"
    site_prep = "site-prep"
    excavation_foundation = "excavation-foundation"
    utilities = "utilities"
    water_sewer = "water-sewer"
    rough_framing = "rough-framing"
    windows_doors = "windows-doors"
    exterior_finishes = "exterior-finishes"
    roofing = "roofing"
    masonry_paving = "masonry-paving"
    porches_decks = "porches-decks"
    insulation = "insulation"
    plumbing = "plumbing"
    electrical = "electrical"
    hvac = "hvac"
    drywall = "drywall"
    interior_finishes = "interior-finishes"
    kitchen = "kitchen"
    bath = "bath"
    appliances = "appliances"
    other = "other"
    custom = "custom"   # 自定义类别，文字存放在 *_label 字段


class CategoryGroup(enum.Enum):
    admin = "admin"
    exterior = "exterior"
    structure = "structure"
    mep = "mep"
    interior = "interior"
    other = "other"


CATEGORY_TO_GROUP = {
    TradeCategory.planning: CategoryGroup.admin,
    TradeCategory.site_prep: CategoryGroup.exterior,
    TradeCategory.excavation_foundation: CategoryGroup.exterior,
    TradeCategory.utilities: CategoryGroup.exterior,
    TradeCategory.water_sewer: CategoryGroup.exterior,
    TradeCategory.roofing: CategoryGroup.exterior,
    TradeCategory.masonry_paving: CategoryGroup.exterior,
    TradeCategory.porches_decks: CategoryGroup.exterior,
    TradeCategory.exterior_finishes: CategoryGroup.exterior,
    TradeCategory.rough_framing: CategoryGroup.structure,
    TradeCategory.windows_doors: CategoryGroup.structure,
    TradeCategory.insulation: CategoryGroup.mep,
    TradeCategory.plumbing: CategoryGroup.mep,
    TradeCategory.electrical: CategoryGroup.mep,
    TradeCategory.hvac: CategoryGroup.mep,
    TradeCategory.drywall: CategoryGroup.interior,
    TradeCategory.interior_finishes: CategoryGroup.interior,
    TradeCategory.kitchen: CategoryGroup.interior,
    TradeCategory.bath: CategoryGroup.interior,
    TradeCategory.appliances: CategoryGroup.interior,
    TradeCategory.other: CategoryGroup.other,
}


def category_group(category: TradeCategory) -> CategoryGroup:
    # custom 类别没有映射，统一归到 other
    return CATEGORY_TO_GROUP.get(category, CategoryGroup.other)


# Unit related enums
class UnitType(enum.Enum):
    sqft = "sqft"
    linear_ft = "linear_ft"
    cubic_yd = "cubic_yd"
    each = "each"
    lot = "lot"
    hour = "hour"
    day = "day"
    load = "load"
    custom = "custom"


# AuditLog related enums
class AuditEntityType(enum.Enum):
    Project = "project"
    ProjectActuals = "project_actuals"
    LaborEntry = "labor_entry"
    MaterialEntry = "material_entry"
    SubcontractorEntry = "subcontractor_entry"


class AuditAction(enum.Enum):
    create = "create"
    update = "update"
    delete = "delete"
    system = "system"


def enum_values(enum_cls) -> list:
    """values_callable for sqlalchemy Enum columns: persist .value instead of .name"""
    return [member.value for member in enum_cls]
