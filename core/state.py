class RuntimeConfig:
    """
    Singleton class to hold global runtime configurations.
    """
    # Verbose by default: spinners and step lines on the console
    VERBOSE: bool = True
    CONFIG_FILE: str = "rehost.yaml"

config = RuntimeConfig()
