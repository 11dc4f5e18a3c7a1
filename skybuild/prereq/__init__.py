from skybuild.prereq.installer import NO_ADDITIONAL_SOFTWARE, install_prerequisites

__all__ = ["NO_ADDITIONAL_SOFTWARE", "install_prerequisites"]
