"""
Script: apim_eks package
What: Holds Python workflow helpers that replaced the older APIM-to-EKS shell scripts.
Doing: Groups CLI entrypoints, cloud CLI wrappers, and shared utility code in one importable package.
Why: Keeps pipeline, deploy, and token logic readable and testable instead of spread across shell files.
Goal: Provide one maintainable home for image build, token sync, and workload deploy logic.
"""
