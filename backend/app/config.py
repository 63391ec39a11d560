from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Mediator Transport Solver"
    APP_VERSION: str = "1.0.0"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = False

    # Numeric tolerances
    DEGENERACY_EPSILON: float = 1e-4      # placeholder quantity for degenerate bases
    BASIC_CELL_TOLERANCE: float = 5e-5    # below DEGENERACY_EPSILON so placeholder cells stay in the dual system
    REPORTING_TOLERANCE: float = 1e-4     # allocation at or below this is not a real shipment
    IMPROVEMENT_THRESHOLD: float = 1e-3   # minimum opportunity for an entering cell
    BALANCE_TOLERANCE: float = 1e-9       # |supply - demand| below this counts as balanced

    # Iteration caps
    MAX_ITERATIONS: int = 100             # MODI improvement rounds
    MAX_DUAL_PASSES: int = 200            # u/v propagation sweeps
    MAX_CYCLE_LENGTH: int = 20            # cells on a stepping-stone path

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
