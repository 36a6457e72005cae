"""Container provisioning: context, staging, linking and the Tomcat container."""
