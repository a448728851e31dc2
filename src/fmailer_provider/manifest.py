PROVIDER_MANIFEST = {
    "name": "fmailer",
    "display_name": "FMailer",
    "version": "0.1.0",
    "module": "fmailer_provider.provider:configure",

    # Types registered in provider.RESOURCES / provider.DATA_SOURCES
    "resources": ["fmailer_domain_template"],
    "data_sources": ["fmailer_domain_template"],

    # Provider block attributes and their environment defaults
    "config": {
        "token": {"required": True, "sensitive": True, "env": "FMAILER_TOKEN"},
        "endpoint": {"required": False, "env": "FMAILER_ENDPOINT"},
    },

    # Importable by uuid
    "importable": ["fmailer_domain_template"],
}
