"""
Workload models read from admission requests.

Only the slice of an apps/v1 Deployment the webhook looks at is modelled:
object metadata and the pod template's annotations and volumes. Unknown
fields are ignored so any valid Deployment decodes.
"""

from pydantic import BaseModel, Field


class ConfigMapVolumeSource(BaseModel):
    """Config map projected into a pod as a volume."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    name: str = Field("", description="Name of the referenced config map")


class SecretVolumeSource(BaseModel):
    """Secret projected into a pod as a volume."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    secret_name: str = Field(
        "", alias="secretName", description="Name of the referenced secret"
    )


class Volume(BaseModel):
    """
    Pod volume.

    Acts as a tagged variant: a config map source, a secret source, or any
    other volume type (both source fields unset), which the webhook ignores.
    """

    model_config = {"populate_by_name": True, "extra": "ignore"}

    name: str = Field("", description="Volume name within the pod")
    config_map: ConfigMapVolumeSource | None = Field(None, alias="configMap")
    secret: SecretVolumeSource | None = None


class ObjectMeta(BaseModel):
    model_config = {"populate_by_name": True, "extra": "ignore"}

    name: str = ""
    namespace: str = ""
    annotations: dict[str, str] | None = None


class PodSpec(BaseModel):
    model_config = {"populate_by_name": True, "extra": "ignore"}

    volumes: list[Volume] | None = None


class PodTemplateSpec(BaseModel):
    model_config = {"populate_by_name": True, "extra": "ignore"}

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PodSpec = Field(default_factory=PodSpec)


class DeploymentSpec(BaseModel):
    model_config = {"populate_by_name": True, "extra": "ignore"}

    template: PodTemplateSpec = Field(default_factory=PodTemplateSpec)


class Deployment(BaseModel):
    """apps/v1 Deployment as seen by the webhook."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: DeploymentSpec = Field(default_factory=DeploymentSpec)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def template_annotations(self) -> dict[str, str] | None:
        """Pod template annotations; None when the template has no map at all."""
        return self.spec.template.metadata.annotations

    @property
    def volumes(self) -> list[Volume]:
        return self.spec.template.spec.volumes or []
