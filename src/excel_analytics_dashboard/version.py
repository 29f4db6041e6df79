APP_TITLE = "Excel Analytics Dashboard"
MAJOR_VERSION = 1
BUILD_VERSION = "1.0.0"
