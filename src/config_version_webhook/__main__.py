from config_version_webhook.app import main

main()
