"""
0001_initial_schema.py
Extensions, enum vocabularies, and the inventory tables.
"""

from __future__ import annotations

from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

ENUMS: dict[str, tuple[str, ...]] = {
    "construction_status": ("draft", "review", "published"),
    "user_role": ("public", "researcher", "admin"),
    "typology": ("azenha", "rodizio", "mare", "torre_fixa", "giratorio", "velas", "armacao"),
    "access": ("pedestrian", "car", "difficult_none", "traditional_track"),
    "legal_protection": ("inexistent", "under_study", "classified"),
    "property_status": ("private", "public", "unknown"),
    "epoch": ("18th_c", "19th_c", "20th_c", "pre_18th_c"),
    "current_use": ("milling", "housing", "tourism", "ruin", "museum"),
    "setting": ("rural", "urban", "isolated", "riverbank"),
    "conservation_state": ("very_good", "good", "reasonable", "bad", "very_bad_ruin"),
    "plan_shape": ("circular", "quadrangular", "rectangular", "irregular"),
    "volumetry": ("cylindrical", "conical", "prismatic_sq_rec"),
    "construction_technique": ("dry_stone", "mortared_stone", "mixed_other"),
    "exterior_finish": ("exposed", "plastered", "whitewashed"),
    "roof_shape": ("conical", "gable", "lean_to", "inexistent", "false_dome"),
    "roof_material": ("tile", "zinc", "thatch", "slate", "stone"),
    "captation_type": ("weir", "pool", "direct"),
    "conduction_type": ("levada", "modern_pipe"),
    "conduction_state": ("operational_clean", "clogged", "damaged_broken"),
    "admission_rodizio": ("cubo", "calha"),
    "admission_azenha": ("calha_superior", "canal_inferior"),
    "wheel_type_rodizio": ("penas", "colheres"),
    "wheel_type_azenha": ("copeira", "dezio_palas"),
    "motive_apparatus": ("sails", "shells", "tail", "cap"),
    "millstone_state": ("complete", "disassembled", "fragmented", "missing"),
    "epigraphy_location": ("door_jambs", "interior_walls", "millstones", "other"),
    "epigraphy_type": ("dates", "initials", "religious_symbols", "counting_marks"),
}


def _create_enum_sql(name: str, values: tuple[str, ...]) -> str:
    literals = ", ".join(f"'{v}'" for v in values)
    return f"""
DO $$
BEGIN
  IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = '{name}') THEN
    CREATE TYPE {name} AS ENUM ({literals});
  END IF;
END$$;
"""


TABLES_UP = [
    r"""
CREATE TABLE profiles (
    id UUID PRIMARY KEY,
    role user_role NOT NULL DEFAULT 'public',
    full_name TEXT,
    academic_affiliation TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
""",
    r"""
CREATE TABLE constructions (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    slug VARCHAR(255) NOT NULL,
    geom GEOGRAPHY(POINT, 4326),
    legacy_id TEXT,
    type_category TEXT NOT NULL DEFAULT 'MILL',
    district TEXT,
    municipality TEXT,
    parish TEXT,
    place TEXT,
    address TEXT,
    drainage_basin TEXT,
    main_image TEXT,
    gallery_images TEXT[],
    custom_icon_url TEXT,
    status construction_status NOT NULL DEFAULT 'draft',
    created_by UUID REFERENCES profiles (id),
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT uq_constructions_slug UNIQUE (slug)
);
""",
    "CREATE INDEX ix_constructions_status ON constructions (status)",
    "CREATE INDEX ix_constructions_type_category ON constructions (type_category)",
    "CREATE INDEX ix_constructions_geom ON constructions USING gist (geom)",
    r"""
CREATE TABLE construction_translations (
    construction_id UUID NOT NULL REFERENCES constructions (id) ON DELETE CASCADE,
    lang_code VARCHAR(10) NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    observations_structure TEXT,
    observations_roof TEXT,
    observations_hydraulic TEXT,
    observations_mechanism TEXT,
    observations_general TEXT,
    CONSTRAINT pk_construction_translations PRIMARY KEY (construction_id, lang_code)
);
""",
    r"""
CREATE TABLE water_lines (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    construction_id UUID REFERENCES constructions (id) ON DELETE CASCADE,
    slug VARCHAR(255) NOT NULL,
    path GEOMETRY(LINESTRING, 4326) NOT NULL,
    color VARCHAR(7) NOT NULL DEFAULT '#3b82f6',
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT uq_water_lines_slug UNIQUE (slug),
    CONSTRAINT uq_water_lines_construction_id UNIQUE (construction_id)
);
""",
    "CREATE INDEX ix_water_lines_path ON water_lines USING gist (path)",
    r"""
CREATE TABLE water_line_translations (
    water_line_id UUID NOT NULL REFERENCES water_lines (id) ON DELETE CASCADE,
    locale VARCHAR(10) NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    CONSTRAINT pk_water_line_translations PRIMARY KEY (water_line_id, locale)
);
""",
    r"""
CREATE TABLE mills_data (
    construction_id UUID PRIMARY KEY REFERENCES constructions (id) ON DELETE CASCADE,
    typology typology NOT NULL,
    access access,
    legal_protection legal_protection,
    property_status property_status,
    epoch epoch,
    setting setting,
    current_use current_use,
    plan_shape plan_shape,
    volumetry volumetry,
    construction_technique construction_technique,
    exterior_finish exterior_finish,
    roof_shape roof_shape,
    roof_material roof_material,
    captation_type captation_type,
    conduction_type conduction_type,
    conduction_state conduction_state,
    admission_rodizio admission_rodizio,
    admission_azenha admission_azenha,
    wheel_type_rodizio wheel_type_rodizio,
    wheel_type_azenha wheel_type_azenha,
    rodizio_qty INTEGER,
    azenha_qty INTEGER,
    motive_apparatus motive_apparatus,
    millstone_quantity INTEGER,
    millstone_diameter TEXT,
    millstone_state millstone_state,
    has_tremonha BOOLEAN NOT NULL DEFAULT false,
    has_quelha BOOLEAN NOT NULL DEFAULT false,
    has_urreiro BOOLEAN NOT NULL DEFAULT false,
    has_aliviadouro BOOLEAN NOT NULL DEFAULT false,
    has_farinaleiro BOOLEAN NOT NULL DEFAULT false,
    epigraphy_presence BOOLEAN NOT NULL DEFAULT false,
    epigraphy_location epigraphy_location,
    epigraphy_type epigraphy_type,
    epigraphy_description TEXT,
    rating_structure conservation_state,
    rating_roof conservation_state,
    rating_hydraulic conservation_state,
    rating_mechanism conservation_state,
    rating_overall conservation_state,
    has_oven BOOLEAN NOT NULL DEFAULT false,
    has_miller_house BOOLEAN NOT NULL DEFAULT false,
    has_stable BOOLEAN NOT NULL DEFAULT false,
    has_fulling_mill BOOLEAN NOT NULL DEFAULT false,
    stone_type_granite BOOLEAN NOT NULL DEFAULT false,
    stone_type_schist BOOLEAN NOT NULL DEFAULT false,
    stone_type_other BOOLEAN NOT NULL DEFAULT false,
    stone_material_description TEXT,
    gable_material_lusa BOOLEAN NOT NULL DEFAULT false,
    gable_material_marselha BOOLEAN NOT NULL DEFAULT false,
    gable_material_meia_cana BOOLEAN NOT NULL DEFAULT false,
    length DOUBLE PRECISION,
    width DOUBLE PRECISION,
    height DOUBLE PRECISION,
    water_line_id UUID REFERENCES water_lines (id) ON DELETE SET NULL
);
""",
    "CREATE INDEX ix_mills_data_typology ON mills_data (typology)",
    "CREATE INDEX ix_mills_data_water_line_id ON mills_data (water_line_id)",
    r"""
CREATE TABLE pocas_data (
    construction_id UUID PRIMARY KEY REFERENCES constructions (id) ON DELETE CASCADE,
    water_line_id UUID NOT NULL REFERENCES water_lines (id) ON DELETE RESTRICT
);
""",
    r"""
CREATE TABLE bibliography (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    title TEXT NOT NULL,
    author TEXT NOT NULL,
    year INTEGER,
    publisher TEXT,
    url TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT ck_bibliography_title_not_empty CHECK (length(title) > 0)
);
""",
]

TABLES_DOWN = [
    "bibliography",
    "pocas_data",
    "mills_data",
    "water_line_translations",
    "water_lines",
    "construction_translations",
    "constructions",
    "profiles",
]


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")
    for name, values in ENUMS.items():
        op.execute(_create_enum_sql(name, values))
    for statement in TABLES_UP:
        op.execute(statement)


def downgrade() -> None:
    for table in TABLES_DOWN:
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")
    for name in reversed(list(ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
