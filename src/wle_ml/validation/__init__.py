from .schema import validate_dataframe_schema, validate_sensor_schema
from .quality import check_data_quality, class_balance

__all__ = ["validate_dataframe_schema", "validate_sensor_schema", "check_data_quality", "class_balance"]
