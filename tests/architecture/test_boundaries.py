from pytest_archon import archrule

PACKAGE = "cqrs_ddd_persistence_simpledb"


def test_codec_and_translator_are_pure() -> None:
    """
    Value codec and query translator do no I/O.
    They must not reach the AWS SDK, the connection or the store.
    """
    (
        archrule("codec_is_pure")
        .match(f"{PACKAGE}.serialization")
        .match(f"{PACKAGE}.query_builder")
        .should_not_import("aiobotocore*")
        .should_not_import("botocore*")
        .should_not_import(f"{PACKAGE}.connection")
        .should_not_import(f"{PACKAGE}.client")
        .should_not_import(f"{PACKAGE}.store")
        .check(PACKAGE, skip_type_checking=True, only_direct_imports=True)
    )


def test_provisioning_uses_client_port_only() -> None:
    """
    Domain provisioning talks to the client through its port.
    """
    (
        archrule("provisioning_layering")
        .match(f"{PACKAGE}.provisioning")
        .should_not_import("aiobotocore*")
        .should_not_import(f"{PACKAGE}.connection")
        .should_not_import(f"{PACKAGE}.client")
        .should_not_import(f"{PACKAGE}.store")
        .check(PACKAGE, skip_type_checking=True, only_direct_imports=True)
    )


def test_ports_have_no_runtime_dependencies() -> None:
    """
    Ports (interfaces) should not depend on adapters at runtime.
    """
    (
        archrule("ports_layering")
        .match(f"{PACKAGE}.ports")
        .should_not_import(f"{PACKAGE}.client")
        .should_not_import(f"{PACKAGE}.store")
        .should_not_import(f"{PACKAGE}.memory")
        .check(PACKAGE, skip_type_checking=True, only_direct_imports=True)
    )


def test_store_does_not_use_test_fake() -> None:
    """
    The in-memory client is for tests; production modules must not import it.
    """
    (
        archrule("fake_isolation")
        .match(f"{PACKAGE}.store")
        .match(f"{PACKAGE}.client")
        .match(f"{PACKAGE}.connection")
        .should_not_import(f"{PACKAGE}.memory")
        .check(PACKAGE, only_direct_imports=True)
    )
