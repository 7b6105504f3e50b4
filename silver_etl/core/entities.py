"""
Registry of the entities loaded into the silver layer.

The registry order is the default load order of a pipeline run.
"""

from dataclasses import dataclass
from typing import Callable

from pyspark.sql import DataFrame
from pyspark.sql.types import StructType

from silver_etl.core.exceptions import ConfigurationError
from silver_etl.core.schema import bronze, silver
from silver_etl.core.transforms import (
    clean_customer_attributes,
    clean_customer_locations,
    clean_customers,
    clean_product_categories,
    clean_products,
    clean_sales,
)

Transform = Callable[[DataFrame], DataFrame]


@dataclass(frozen=True)
class EntityDefinition:
    """
    One bronze -> silver entity.

    Attributes:
        name: Entity (and table) name, shared by bronze and silver
        bronze_schema: Spark schema of the raw batch
        silver_columns: Column layout of the silver table
        transform: Cleaning function applied to the raw batch
        source_file: File name of the raw CSV export
    """

    name: str
    bronze_schema: StructType
    silver_columns: silver.Columns
    transform: Transform
    source_file: str

    @property
    def silver_column_names(self) -> list[str]:
        return silver.column_names(self.silver_columns)


ENTITIES: dict[str, EntityDefinition] = {
    entity.name: entity
    for entity in (
        EntityDefinition(
            name="crm_cust_info",
            bronze_schema=bronze.CRM_CUST_INFO,
            silver_columns=silver.CRM_CUST_INFO,
            transform=clean_customers,
            source_file="cust_info.csv",
        ),
        EntityDefinition(
            name="crm_prd_info",
            bronze_schema=bronze.CRM_PRD_INFO,
            silver_columns=silver.CRM_PRD_INFO,
            transform=clean_products,
            source_file="prd_info.csv",
        ),
        EntityDefinition(
            name="crm_sales_details",
            bronze_schema=bronze.CRM_SALES_DETAILS,
            silver_columns=silver.CRM_SALES_DETAILS,
            transform=clean_sales,
            source_file="sales_details.csv",
        ),
        EntityDefinition(
            name="erp_cust_az12",
            bronze_schema=bronze.ERP_CUST_AZ12,
            silver_columns=silver.ERP_CUST_AZ12,
            transform=clean_customer_attributes,
            source_file="CUST_AZ12.csv",
        ),
        EntityDefinition(
            name="erp_loc_a101",
            bronze_schema=bronze.ERP_LOC_A101,
            silver_columns=silver.ERP_LOC_A101,
            transform=clean_customer_locations,
            source_file="LOC_A101.csv",
        ),
        EntityDefinition(
            name="erp_px_cat_g1v2",
            bronze_schema=bronze.ERP_PX_CAT_G1V2,
            silver_columns=silver.ERP_PX_CAT_G1V2,
            transform=clean_product_categories,
            source_file="PX_CAT_G1V2.csv",
        ),
    )
}

DEFAULT_LOAD_ORDER: tuple[str, ...] = tuple(ENTITIES)


def get_entity(name: str) -> EntityDefinition:
    """
    Look up an entity by name.

    Raises:
        ConfigurationError: If the entity is unknown
    """
    try:
        return ENTITIES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown entity '{name}'. Known entities: {', '.join(DEFAULT_LOAD_ORDER)}"
        ) from None
